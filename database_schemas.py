# Database schema definitions

USERS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE NOT NULL,
        username TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        display_name TEXT,
        bio TEXT,
        avatar_path TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
'''

SESSIONS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS sessions (
        token TEXT PRIMARY KEY,
        user_id INTEGER NOT NULL,
        expires_at INTEGER NOT NULL, -- unix seconds
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    )
'''

CATEGORIES_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL
    )
'''

POSTS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    )
'''

POST_CATEGORIES_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS post_categories (
        post_id INTEGER NOT NULL,
        category_id INTEGER NOT NULL,
        PRIMARY KEY (post_id, category_id),
        FOREIGN KEY (post_id) REFERENCES posts (id) ON DELETE CASCADE,
        FOREIGN KEY (category_id) REFERENCES categories (id) ON DELETE CASCADE
    )
'''

COMMENTS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS comments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        post_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (post_id) REFERENCES posts (id) ON DELETE CASCADE,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    )
'''

POST_REACTIONS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS post_reactions (
        user_id INTEGER NOT NULL,
        post_id INTEGER NOT NULL,
        value INTEGER NOT NULL CHECK (value IN (1, -1)), -- 1 for like, -1 for dislike
        PRIMARY KEY (user_id, post_id),
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
        FOREIGN KEY (post_id) REFERENCES posts (id) ON DELETE CASCADE
    )
'''

COMMENT_REACTIONS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS comment_reactions (
        user_id INTEGER NOT NULL,
        comment_id INTEGER NOT NULL,
        value INTEGER NOT NULL CHECK (value IN (1, -1)),
        PRIMARY KEY (user_id, comment_id),
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
        FOREIGN KEY (comment_id) REFERENCES comments (id) ON DELETE CASCADE
    )
'''

INDEX_SCHEMAS = (
    "CREATE INDEX IF NOT EXISTS idx_sessions_user_id ON sessions (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_posts_user_id ON posts (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_comments_user_id ON comments (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_comments_post_id ON comments (post_id)",
)

TABLE_SCHEMAS = (
    USERS_TABLE_SCHEMA,
    SESSIONS_TABLE_SCHEMA,
    CATEGORIES_TABLE_SCHEMA,
    POSTS_TABLE_SCHEMA,
    POST_CATEGORIES_TABLE_SCHEMA,
    COMMENTS_TABLE_SCHEMA,
    POST_REACTIONS_TABLE_SCHEMA,
    COMMENT_REACTIONS_TABLE_SCHEMA,
)
