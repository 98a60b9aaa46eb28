from prometheus_client import Counter, Histogram

# Inbound updates by event kind (an update carries one or more kinds).
UPDATES_TOTAL = Counter(
    "telegram_updates_total",
    "Total number of Telegram updates received",
    ["kind"],
)

# Handler invocations by matching tier (command, text, event).
HANDLERS_TOTAL = Counter(
    "telegram_handlers_total",
    "Total number of handlers invoked",
    ["tier"],
)

# Updates for which no handler matched.
UNHANDLED_TOTAL = Counter(
    "telegram_unhandled_updates_total",
    "Total number of updates that matched no handler",
)

# Failures by stage (handler, notify, middleware).
HANDLER_ERRORS = Counter(
    "telegram_handler_errors_total",
    "Total number of failures while processing updates",
    ["stage"],
)

# End-to-end processing time of one update.
UPDATE_LATENCY = Histogram(
    "telegram_update_latency_seconds",
    "Time spent processing a Telegram update",
)
