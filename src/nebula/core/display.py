"""Presentation lookup tables, kept apart from the domain enums."""

from .tasks import Category, Priority
from .views import DensityLevel

PRIORITY_COLORS = {
    Priority.LOW: "green",
    Priority.MEDIUM: "yellow",
    Priority.HIGH: "bright_yellow",
    Priority.URGENT: "red",
}

PRIORITY_MARKERS = {
    Priority.LOW: "",
    Priority.MEDIUM: "!",
    Priority.HIGH: "!!",
    Priority.URGENT: "!!!",
}

CATEGORY_COLORS = {
    Category.WORK: "blue",
    Category.PERSONAL: "magenta",
    Category.HEALTH: "green",
    Category.FINANCE: "yellow",
    Category.LEARNING: "bright_blue",
    Category.SOCIAL: "bright_magenta",
    Category.OTHER: "white",
}

DENSITY_MARKERS = {
    DensityLevel.NONE: " ",
    DensityLevel.LOW: ".",
    DensityLevel.MEDIUM: "o",
    DensityLevel.HIGH: "#",
}
