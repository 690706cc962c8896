"""Task Tool Schemas — Anthropic Tool Use format for task field updates.

Invariants:
    - newTime is documented as "HH:00"; the dispatcher re-validates it regardless
    - changeType enum mirrors ChangeType (checkin | checkout)
    - update_task_info requires at least one of newSumToCollect / newKeysCount at
      dispatch time; the schema alone cannot express "one of", so both stay optional

Design Decisions:
    - userId kept in the schema for audit (updatedBy); the engine overwrites it with
      the resolved caller id when the call comes from the model
"""

TOOLS_TASK = [
    {
        "name": "update_task_time",
        "description": "Updates checkin or checkout time for a given task.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": (
                        'Unique task ID, e.g. "2025-03-15_562_checkin"'
                    ),
                },
                "newTime": {
                    "type": "string",
                    "description": 'New time in "HH:00" format.',
                },
                "changeType": {
                    "type": "string",
                    "enum": ["checkin", "checkout"],
                    "description": (
                        'Which time to update? "checkin" or "checkout" only.'
                    ),
                },
                "userId": {
                    "type": "string",
                    "description": "Telegram user ID for logging",
                },
            },
            "required": ["taskId", "newTime", "changeType", "userId"],
        },
    },
    {
        "name": "update_task_info",
        "description": "Updates sumToCollect and/or keysCount for a task.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "Unique ID of the task",
                },
                "newSumToCollect": {
                    "type": ["number", "null"],
                    "description": "Optional new sum to collect (if updating).",
                },
                "newKeysCount": {
                    "type": ["number", "null"],
                    "description": "Optional new number of keys (if updating).",
                },
                "userId": {
                    "type": "string",
                    "description": "Telegram user ID for logging",
                },
            },
            "required": ["taskId", "userId"],
        },
    },
]
