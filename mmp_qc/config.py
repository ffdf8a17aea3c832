from mmp_qc.settings.main import qc_settings

# the eng pressure plateau that signals a backtrack lags the true stall by
# about a minute; 60 s is the smallest usable margin
TIMESHIFT_SECONDS = 75

# Time convention shared by every stream
TIME_UNITS = qc_settings.time.units
TIME_CALENDAR = qc_settings.time.calendar

# Stage identifiers written to operation_history
IMPORT_STAGE = "import_profile"
BACKTRACK_STAGE = "flag_backtrack"
SYNC_STAGE = "sync_ctd_eng"
VOID_STAGE = "void_short_profiles"

# data_status strings
STATUS_IMPORTED = "imported"
STATUS_NO_DATA = "no data"
STATUS_BACKTRACK_NOT_FLAGGED = "backtrack NOT FLAGGED"
STATUS_BACKTRACK_ILLEGAL = "ILLEGAL backtrack code"
STATUS_BACKTRACK_FLAGGED = "backtrack FLAGGED: code {code}"
STATUS_NOT_SYNCED = "NOT SYNC'ED"
STATUS_MASK_BAD = "MASK FLAGGED BAD"
STATUS_SYNCED = "sync'ed"
STATUS_VOIDED = "allDataSetToEMPTY"
STATUS_NO_CHANGE = "noChange"
