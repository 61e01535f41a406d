unread_counts_sql = """
CREATE TABLE unread_counts (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    conversation_id UUID NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,

    count INTEGER NOT NULL DEFAULT 0 CHECK (count >= 0),

    -- One badge per viewer per conversation
    CONSTRAINT unique_unread_pair UNIQUE (user_id, conversation_id)
);
"""
