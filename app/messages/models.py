messages_sql = """
CREATE TABLE messages (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    conversation_id UUID NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
    sender_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    content TEXT NOT NULL,

    -- Soft delete, rows are never removed
    deleted BOOLEAN NOT NULL DEFAULT FALSE,

    -- Server clock, ms since epoch
    created_at BIGINT NOT NULL
);

CREATE INDEX messages_conversation_created_idx ON messages (conversation_id, created_at);
"""
