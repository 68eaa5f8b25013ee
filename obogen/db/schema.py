"""DDL for the two-table deck store."""

# Cards are owned by their deck. DuckDB has no ON DELETE CASCADE, so the
# store deletes a deck's cards itself (see DeckDatabase.delete_deck).
DB_SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS deck_seq START 1;
CREATE SEQUENCE IF NOT EXISTS card_id_seq START 1;

CREATE TABLE IF NOT EXISTS decks (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    seq BIGINT NOT NULL DEFAULT nextval('deck_seq'),
    title VARCHAR NOT NULL,
    age_range VARCHAR NOT NULL,
    voice VARCHAR,
    card_count INTEGER NOT NULL CHECK (card_count > 0),
    created_at TIMESTAMP NOT NULL DEFAULT current_timestamp
);

CREATE TABLE IF NOT EXISTS cards (
    id BIGINT PRIMARY KEY DEFAULT nextval('card_id_seq'),
    -- Owned by decks.id. No REFERENCES clause: DuckDB cannot cascade deletes
    -- and rejects deleting a referenced deck row in the same transaction as
    -- its cards, so save_deck and delete_deck keep this link.
    deck_id UUID NOT NULL,
    position INTEGER NOT NULL CHECK (position >= 1),
    question VARCHAR NOT NULL,
    answer VARCHAR NOT NULL,
    UNIQUE (deck_id, position)
);
"""
