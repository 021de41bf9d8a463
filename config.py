"""
Static configuration for the Lease Inspection Scheduler.

Values here are defaults only; callers override them through
SchedulingPolicy or the runner's policy file / command-line flags.
"""

# --- Tabular I/O ---
DATE_FORMAT = "%m/%d/%Y"
NO_DATA = "<no data>"          # Sentinel for blank required cells
TOTAL_ROW_MARKER = "Total"     # Spreadsheet exports often end with a totals row

# --- Inspection Cadence ---
INSPECTION_PERIOD_MONTHS = 3   # Quarterly
GAP_FACTOR = 1.5               # Gaps wider than 1.5 periods get a filler inspection
DAYS_PER_MONTH = 146097 / 4800  # Mean Gregorian month, used for hour-granularity gaps

# --- Lease Buffers ---
DEFAULT_MOVE_IN_MONTHS = 3     # First inspection no sooner than 3 months after move-in
DEFAULT_MOVE_OUT_MONTHS = 1    # Last periodic inspection no later than 1 month before move-out

# --- Capacity ---
DEFAULT_MAX_PER_DAY = 5
DEFAULT_MAX_PER_WEEK = 20
DEFAULT_HORIZON_YEARS = 3

# Safety bound on repair-loop steps; a well-behaved blackout resolver converges long before this
MAX_REPAIR_ITERATIONS = 1_000_000
