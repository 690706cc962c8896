"""Assignment Tool Schemas — Anthropic Tool Use format for admin-only apartment tools.

Invariants:
    - Both tools are admin only; the dispatcher rejects isAdmin=false before any store call
    - targetUserId accepts a raw id, a @handle, or a display name
"""

TOOLS_ASSIGNMENT = [
    {
        "name": "manage_apartment_assignments",
        "description": "Manages apartment assignments for users (admin only).",
        "input_schema": {
            "type": "object",
            "properties": {
                "targetUserId": {
                    "type": "string",
                    "description": (
                        "Telegram user ID OR name/username of user to modify"
                    ),
                },
                "action": {
                    "type": "string",
                    "enum": ["add", "remove"],
                    "description": "Whether to add or remove apartments",
                },
                "apartmentIds": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Array of apartment IDs to add or remove",
                },
                "isAdmin": {
                    "type": "boolean",
                    "description": "Whether the requesting user is an admin",
                },
            },
            "required": ["targetUserId", "action", "apartmentIds", "isAdmin"],
        },
    },
    {
        "name": "show_user_apartments",
        "description": "Shows all apartments assigned to a user (admin only).",
        "input_schema": {
            "type": "object",
            "properties": {
                "targetUserId": {
                    "type": "string",
                    "description": "Telegram user ID or name of user to view",
                },
                "isAdmin": {
                    "type": "boolean",
                    "description": "Whether the requesting user is an admin",
                },
            },
            "required": ["targetUserId", "isAdmin"],
        },
    },
]
