"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Time-slot grid for attendance sessions.
DAY_START_HOUR = 7
DAY_END_HOUR = 22
SLOT_STEP_MINUTES = 30
TK_SLOT_MINUTES = 60
DEFAULT_SLOT_MINUTES = 90
SLOT_OVERRUN_MINUTES = 30

DEFAULT_RECORD_LIMIT = 500

DEFAULT_CLASS_OPTIONS = (
    "Matematika",
    "Fisika",
    "Kimia",
    "Biologi",
    "Bahasa Inggris",
    "Bahasa Indonesia",
    "Komputer",
    "Calistung",
    "IPA",
    "IPS",
)

LOCATION_OPTIONS = (
    "Rumah Kuning",
    "Sapphire",
    "Private di Rumah Siswa",
)
