typing_markers_sql = """
CREATE TABLE typing_markers (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    conversation_id UUID NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
    user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,

    -- ms since epoch; rows past this are ignored, not swept
    expires_at BIGINT NOT NULL,

    CONSTRAINT unique_typing_marker UNIQUE (conversation_id, user_id)
);
"""
