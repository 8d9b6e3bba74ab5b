# --- Score CTE ---

SCORE_CTE_NAME = "id_and_total_score"
SCORE_UNION_ALIAS = "ids_and_scores"
SCORE_COLUMN = "score"
ID_COLUMN = "id"

# Seed row of the score union: keeps the union valid with zero conditions
# and never matches a real identifier.
SCORE_SEED_SQL = f"NULL AS {ID_COLUMN}, 0 AS {SCORE_COLUMN}"


# --- Database ---

DEFAULT_DB_PATH = "searchbuilder.db"
SQLITE_BUSY_TIMEOUT_MS = 30000


# --- Logging ---

LOG_BINDINGS_LIMIT = 20


# --- CLI ---

DEFAULT_RESULT_LIMIT = 20
