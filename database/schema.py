# ======================= SETTINGS =======================
# One row per (device, key). Values are JSON text.

settings_schema = '''
    CREATE TABLE IF NOT EXISTS settings (
        device_id INTEGER NOT NULL,
        key TEXT NOT NULL,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,

        PRIMARY KEY (device_id, key)
    )
'''
