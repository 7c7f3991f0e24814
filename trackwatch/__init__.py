"""trackwatch: live dead-reckoned air and surface picture from dump1090 feeds."""

__version__ = "0.1.0"
