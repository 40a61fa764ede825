"""Global constants for the footyledger application."""

# Collection names
USERS_COLLECTION = "users"
TOURNAMENTS_COLLECTION = "tournaments"
MATCHES_COLLECTION = "matches"

# Document fields shared across collections
OWNER_ID = "ownerId"
LEGACY_OWNER_REF = "ownerRef"
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"

# Fields for 'tournaments' documents
TOURNAMENT_NAME = "name"
TOURNAMENT_TEAMS = "teams"
TOURNAMENT_VIEWS = "views"

# Fields for 'matches' documents
MATCH_TOURNAMENT_ID = "tournamentId"
MATCH_HOME_TEAM_ID = "homeTeamId"
MATCH_AWAY_TEAM_ID = "awayTeamId"
MATCH_HOME_SCORE = "homeScore"
MATCH_AWAY_SCORE = "awayScore"
MATCH_DATE = "date"
MATCH_FIELDS = (
    MATCH_HOME_TEAM_ID,
    MATCH_AWAY_TEAM_ID,
    MATCH_HOME_SCORE,
    MATCH_AWAY_SCORE,
    MATCH_DATE,
)

# Fields for 'users' documents
USER_EMAIL = "email"
USER_PASSWORD_HASH = "passwordHash"  # nosec B105
USER_ROLE = "role"

# Roles
ROLE_ADMIN = "admin"
ROLE_ORGANIZER = "organizer"
ROLE_USER = "user"
ELEVATED_ROLES = frozenset({ROLE_ADMIN, ROLE_ORGANIZER})
ROLES = ELEVATED_ROLES | {ROLE_USER}

# Standings
UNKNOWN_TEAM_NAME = "Unknown team"
POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

# Auth
MIN_PASSWORD_LENGTH = 6
