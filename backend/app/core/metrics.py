from prometheus_client import Counter


mood_entries_upserted_total = Counter(
    "mood_entries_upserted_total",
    "Mood entries written via upsert-by-date",
    ["outcome"],  # inserted | replaced
)

mood_entries_rejected_total = Counter(
    "mood_entries_rejected_total",
    "Mood entries rejected at the write boundary",
    ["field"],
)

storage_unavailable_total = Counter(
    "storage_unavailable_total",
    "Record store failures translated to StorageUnavailable",
    ["source"],  # mood_entries | session_records
)

analytics_snapshots_total = Counter(
    "analytics_snapshots_total",
    "Dashboard analytics snapshots computed",
    ["placeholder"],  # true | false
)

assistant_replies_total = Counter(
    "assistant_replies_total",
    "Assistant turns appended to conversations",
    ["outcome"],  # generated | fallback
)
