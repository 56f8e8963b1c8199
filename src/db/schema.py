"""
Database schema for the Pebble CRM billing sync.
Designed for Supabase (Postgres) with Row Level Security.

Tables:
- users: CRM user + Stripe subscription state

Key design decisions:
1. Stripe is the source of truth - status is mirrored, not validated
2. Rows are never deleted by billing, only moved to 'canceled'
3. Webhooks write with the service role; users can only read their own row
"""

SCHEMA_SQL = """
-- Enable UUID extension
CREATE EXTENSION IF NOT EXISTS "uuid-ossp";

-- Users table
-- CRM identity + billing state written by the Stripe webhook
CREATE TABLE IF NOT EXISTS users (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
    email TEXT UNIQUE NOT NULL,
    display_name TEXT,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW(),

    -- Mirrors Stripe's vocabulary (active, trialing, past_due, canceled,
    -- incomplete, incomplete_expired, unpaid) - no CHECK so new upstream
    -- statuses don't break webhook writes
    subscription_status TEXT,
    subscription_plan TEXT,
    stripe_customer_id TEXT UNIQUE,
    stripe_subscription_id TEXT,
    trial_end TIMESTAMPTZ,
    current_period_end TIMESTAMPTZ
);

-- Row Level Security (RLS) policies
-- Users can only read their own billing state

ALTER TABLE users ENABLE ROW LEVEL SECURITY;

CREATE POLICY users_select_own ON users
    FOR SELECT USING (auth.uid() = id);
"""

INDEXES_SQL = """
-- Performance indexes
CREATE INDEX IF NOT EXISTS idx_users_email ON users(email);
CREATE INDEX IF NOT EXISTS idx_users_stripe_customer ON users(stripe_customer_id);
CREATE INDEX IF NOT EXISTS idx_users_subscription_status ON users(subscription_status);
"""

# Columns the webhook writes - verified by scripts/setup_database.py --verify
BILLING_COLUMN_NAMES = (
    "stripe_customer_id",
    "stripe_subscription_id",
    "subscription_status",
    "subscription_plan",
    "trial_end",
    "current_period_end",
    "updated_at",
)
