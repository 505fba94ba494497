from enum import Enum


class TableNames(str, Enum):
    WEDDING_EVENTS = "wedding_events"
    GUESTS = "guests"
    CEREMONIES = "ceremonies"
    ACCOMMODATIONS = "accommodations"
    ROOM_ALLOCATIONS = "room_allocations"
    MEAL_OPTIONS = "meal_options"
    GUEST_MEAL_SELECTIONS = "guest_meal_selections"
    MESSAGE_TEMPLATES = "message_templates"
