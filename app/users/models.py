users_sql = """
CREATE TABLE users (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    -- subject claim issued by the identity provider
    clerk_id TEXT NOT NULL UNIQUE,

    name TEXT NOT NULL,
    email TEXT NOT NULL,
    image_url TEXT NOT NULL DEFAULT '',

    online BOOLEAN NOT NULL DEFAULT FALSE,
    last_seen BIGINT NOT NULL,

    created_at TIMESTAMPTZ DEFAULT now()
);
"""
