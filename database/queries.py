"""
database/queries.py — SQL-Abfragen für die Quell-Recordsets als benannte Konstanten.

Die SQL-Schicht liefert ausschließlich normalisierte Rohdaten (ein Query
je logischer Tabelle). Joins, Aggregation und Fensterfunktionen passieren
explizit in Python (analysis/), damit Reihenfolge und Tie-Breaks fest
definiert sind und nicht vom DB-Engine-Verhalten abhängen.
"""

# ─────────────────────────────────────────────────────────────
# TRANSAKTIONEN
# ─────────────────────────────────────────────────────────────

PAYMENTS = """
    SELECT
        payment_id,
        customer_id,
        rental_id,
        amount,
        payment_date
    FROM payment
    ORDER BY payment_id
"""

RENTALS = """
    -- return_date NULL = noch nicht zurückgegeben
    SELECT
        rental_id,
        rental_date,
        inventory_id,
        customer_id,
        return_date
    FROM rental
    ORDER BY rental_id
"""

# ─────────────────────────────────────────────────────────────
# BESTAND & KATALOG
# ─────────────────────────────────────────────────────────────

INVENTORY = """
    -- Brücke: physisches Exemplar → Film UND Filiale
    SELECT
        inventory_id,
        film_id,
        store_id
    FROM inventory
    ORDER BY inventory_id
"""

FILMS = """
    SELECT
        film_id,
        title
    FROM film
    ORDER BY film_id
"""

FILM_CATEGORIES = """
    SELECT
        film_id,
        category_id
    FROM film_category
    ORDER BY film_id, category_id
"""

CATEGORIES = """
    SELECT
        category_id,
        name
    FROM category
    ORDER BY category_id
"""

# ─────────────────────────────────────────────────────────────
# STAMMDATEN
# ─────────────────────────────────────────────────────────────

CUSTOMERS = """
    SELECT
        customer_id,
        first_name,
        last_name,
        store_id
    FROM customer
    ORDER BY customer_id
"""

STORES = """
    SELECT
        store_id
    FROM store
    ORDER BY store_id
"""

# Recordset-Name → Query
SOURCE_QUERIES = {
    "payments":        PAYMENTS,
    "rentals":         RENTALS,
    "inventory":       INVENTORY,
    "films":           FILMS,
    "film_categories": FILM_CATEGORIES,
    "categories":      CATEGORIES,
    "customers":       CUSTOMERS,
    "stores":          STORES,
}
