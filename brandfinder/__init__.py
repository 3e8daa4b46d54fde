"""brandfinder - brandable names with a registrable .com, found under a budget."""

__version__ = "0.1.0"
