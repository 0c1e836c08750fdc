"""
Database schema definitions.
Table creation, reservation overlap triggers, indexes, and structure management.
"""

# Message raised by the overlap triggers; models match on it to tell an
# overlap apart from other integrity errors.
OVERLAP_ERROR = 'reservation_overlap'


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'activity_logs',
        'notifications',
        'expenses',
        'reservations',
        'rooms',
        'user_allowed_tabs',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users & Auth Tables
    db.execute('''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'client'
                CHECK (role IN ('admin', 'worker', 'client')),
            phone TEXT,
            address TEXT,
            active INTEGER DEFAULT 1,
            email_verified INTEGER DEFAULT 0,
            email_verification_token TEXT,
            email_verification_expires TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            last_login TIMESTAMP
        )
    ''')

    db.execute('''
        CREATE TABLE user_allowed_tabs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            tab_key TEXT NOT NULL,
            granted_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(user_id, tab_key)
        )
    ''')

    # 2. Rooms
    db.execute('''
        CREATE TABLE rooms (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            room_number TEXT NOT NULL,
            type TEXT NOT NULL,
            name TEXT NOT NULL,
            price REAL NOT NULL DEFAULT 0,
            status TEXT NOT NULL DEFAULT 'available'
                CHECK (status IN ('available', 'booked', 'needs_cleaning', 'out_of_order')),
            description TEXT DEFAULT '',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(type, room_number)
        )
    ''')

    # 3. Reservations
    db.execute('''
        CREATE TABLE reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_code TEXT UNIQUE NOT NULL,
            invoice_number TEXT UNIQUE,
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            user_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
            full_name TEXT NOT NULL,
            phone TEXT NOT NULL,
            address TEXT DEFAULT '',
            guests INTEGER DEFAULT 1,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'confirmed'
                CHECK (status IN ('pending', 'confirmed', 'completed', 'cancelled')),
            total_price REAL NOT NULL DEFAULT 0,
            payment_method TEXT NOT NULL DEFAULT 'cash'
                CHECK (payment_method IN ('cash', 'card')),
            payment_status TEXT NOT NULL DEFAULT 'UNPAID'
                CHECK (payment_status IN ('PAID', 'UNPAID')),
            amount_paid REAL NOT NULL DEFAULT 0,
            paid_at TIMESTAMP,
            cancelled_at TIMESTAMP,
            cancel_reason TEXT,
            admin_hidden INTEGER NOT NULL DEFAULT 0,
            admin_hidden_at TIMESTAMP,
            client_hidden INTEGER NOT NULL DEFAULT 0,
            client_hidden_at TIMESTAMP,
            stripe_session_id TEXT UNIQUE,
            created_by TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date < end_date)
        )
    ''')

    # 4. Notifications (staff bell)
    db.execute('''
        CREATE TABLE notifications (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL,
            title TEXT NOT NULL,
            message TEXT,
            reservation_id INTEGER REFERENCES reservations(id) ON DELETE SET NULL,
            user_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
            payload TEXT,
            is_read INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 5. Activity log
    db.execute('''
        CREATE TABLE activity_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            action TEXT NOT NULL,
            entity_type TEXT NOT NULL,
            entity_id INTEGER,
            description TEXT,
            changes TEXT,
            user_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
            performed_by TEXT,
            ip_address TEXT,
            user_agent TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 6. Expenses
    db.execute('''
        CREATE TABLE expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            expense_date TEXT NOT NULL,
            category TEXT NOT NULL
                CHECK (category IN ('utilities', 'maintenance', 'supplies', 'salary', 'marketing', 'other')),
            amount REAL NOT NULL CHECK (amount > 0),
            payment_method TEXT NOT NULL DEFAULT 'cash'
                CHECK (payment_method IN ('cash', 'card', 'bank_transfer')),
            note TEXT DEFAULT '',
            created_by TEXT,
            created_by_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_triggers(db):
    """
    Create the reservation exclusion triggers.

    Two active reservations (cancelled_at IS NULL AND admin_hidden = 0) on the
    same room may not have overlapping [start_date, end_date) intervals. Dates
    are ISO text, so string comparison orders them correctly.
    """
    db.execute(f'''
        CREATE TRIGGER reservations_no_overlap_insert
        BEFORE INSERT ON reservations
        WHEN NEW.cancelled_at IS NULL AND NEW.admin_hidden = 0
        BEGIN
            SELECT RAISE(ABORT, '{OVERLAP_ERROR}')
            WHERE EXISTS (
                SELECT 1 FROM reservations r
                WHERE r.room_id = NEW.room_id
                  AND r.cancelled_at IS NULL
                  AND r.admin_hidden = 0
                  AND r.start_date < NEW.end_date
                  AND NEW.start_date < r.end_date
            );
        END
    ''')

    db.execute(f'''
        CREATE TRIGGER reservations_no_overlap_update
        BEFORE UPDATE OF room_id, start_date, end_date, cancelled_at, admin_hidden
        ON reservations
        WHEN NEW.cancelled_at IS NULL AND NEW.admin_hidden = 0
        BEGIN
            SELECT RAISE(ABORT, '{OVERLAP_ERROR}')
            WHERE EXISTS (
                SELECT 1 FROM reservations r
                WHERE r.room_id = NEW.room_id
                  AND r.id != NEW.id
                  AND r.cancelled_at IS NULL
                  AND r.admin_hidden = 0
                  AND r.start_date < NEW.end_date
                  AND NEW.start_date < r.end_date
            );
        END
    ''')


def create_indexes(db):
    """Create performance indexes."""

    # Room indexes
    db.execute('CREATE INDEX idx_rooms_type ON rooms(type, room_number)')

    # Reservation indexes
    db.execute('CREATE INDEX idx_reservations_room_dates ON reservations(room_id, start_date, end_date)')
    db.execute('CREATE INDEX idx_reservations_user ON reservations(user_id)')
    db.execute('CREATE INDEX idx_reservations_active ON reservations(cancelled_at, admin_hidden)')

    # Notification indexes
    db.execute('CREATE INDEX idx_notifications_unread ON notifications(is_read, created_at)')

    # Activity log indexes
    db.execute('CREATE INDEX idx_activity_entity ON activity_logs(entity_type, entity_id)')
    db.execute('CREATE INDEX idx_activity_created ON activity_logs(created_at)')

    # Expense indexes
    db.execute('CREATE INDEX idx_expenses_date ON expenses(expense_date, category)')
