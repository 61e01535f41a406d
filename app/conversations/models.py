conversations_sql = """
CREATE TABLE conversations (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    is_group BOOLEAN NOT NULL DEFAULT FALSE,
    name TEXT,
    created_by UUID REFERENCES users(id) ON DELETE SET NULL,
    last_message_id UUID,
    created_at TIMESTAMPTZ DEFAULT now(),

    -- Groups are named, direct chats are not
    CONSTRAINT group_has_name CHECK (
        (is_group AND name IS NOT NULL AND length(btrim(name)) > 0)
        OR (NOT is_group AND name IS NULL)
    )
);
"""

conversation_members_sql = """
CREATE TABLE conversation_members (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    conversation_id UUID REFERENCES conversations(id) ON DELETE CASCADE,
    user_id UUID REFERENCES users(id) ON DELETE CASCADE,
    created_at TIMESTAMPTZ DEFAULT now(),
    UNIQUE (conversation_id, user_id)
);
"""

direct_conversations_sql = """
CREATE TABLE direct_conversations (
    conversation_id UUID PRIMARY KEY REFERENCES conversations(id) ON DELETE CASCADE,

    user1_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    user2_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,

    created_at TIMESTAMPTZ DEFAULT now(),

    -- Enforce canonical ordering
    CONSTRAINT user1_less_than_user2 CHECK (user1_id < user2_id),

    -- Ensure only one conversation per user pair
    CONSTRAINT unique_direct_pair UNIQUE (user1_id, user2_id)
);
"""

# Added after messages exists
conversations_last_message_fk_sql = """
ALTER TABLE conversations
    ADD CONSTRAINT conversations_last_message_fk
    FOREIGN KEY (last_message_id) REFERENCES messages(id) ON DELETE SET NULL;
"""
