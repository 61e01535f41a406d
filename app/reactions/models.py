reactions_sql = """
CREATE TABLE reactions (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    message_id UUID NOT NULL REFERENCES messages(id) ON DELETE CASCADE,
    user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    emoji TEXT NOT NULL,

    created_at BIGINT NOT NULL,

    -- Toggle semantics: one row per user per emoji per message
    CONSTRAINT unique_reaction UNIQUE (message_id, user_id, emoji)
);
"""
