"""TaskStreak core library: task state machine, streak engine and persistence.

Public API re-exports for convenient imports:
    from taskstreak import Tracker, FileStore, reduce, derive_streak, ...
"""

# Errors
from taskstreak.errors import (
    TaskStreakError,
    FormatError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
)

# Date keys
from taskstreak.dates import (
    to_date_key,
    parse_date_key,
    is_valid,
    today,
    diff_days,
    add_days,
    parse_instant,
    date_key_from_iso,
    deadline_status,
    is_overdue,
    is_deadline_allowed,
    DeadlineStatus,
)

# Streak engine
from taskstreak.streak import (
    derive_streak,
    refresh_streak,
    calculate_best_streak,
    calculate_current_streak,
    normalize_daily_completions,
    normalize_history_dates,
    increment_daily_completions,
    completions_for_last_days,
)

# Models
from taskstreak.models import (
    PRIORITIES,
    THEMES,
    Task,
    TaskInput,
    StreakState,
    DailyReview,
    ReviewInput,
    Settings,
    AppState,
    create_default_state,
    new_id,
)

# Sanitizer / migrator
from taskstreak.sanitize import (
    STORAGE_VERSION,
    Envelope,
    parse_envelope,
    migrate_state,
    sanitize_document,
    sanitize_task,
    sanitize_tags,
    serialize_state,
)

# Reducer
from taskstreak.reducer import (
    Action,
    AddTask,
    UpdateTask,
    DeleteTask,
    ToggleTaskDone,
    SetTheme,
    UpsertDailyReview,
    reduce,
)

# Persistence
from taskstreak.storage import (
    Store,
    FileStore,
    MemoryStore,
    load_state,
    save_state,
    load_persisted_theme,
)

# Workspace
from taskstreak.workspace import (
    STORAGE_KEY,
    workspace_root,
    config_path,
    state_path,
    load_config,
    now_local,
    today_str,
    preferred_theme,
)

# Queries
from taskstreak.queries import (
    DashboardStats,
    visible_tasks,
    dashboard_stats,
    completed_history,
    task_view,
    review_for,
)

from taskstreak.tracker import Tracker
