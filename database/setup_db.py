"""
database/setup_db.py — Datenbank-Setup & realistische Beispieldaten.

Generiert ein synthetisches DVD-Verleih-Dataset (Schema angelehnt an
die klassische Sakila/Pagila-Struktur) mit eingebetteten Mustern:
- Long-Tail-Popularität der Filme (wenige Titel tragen den Umsatz)
- Kunden mit sehr unterschiedlicher Ausleih-Frequenz
- Verspätungsgebühren bei Überschreitung der Leihdauer
- Offene Ausleihen (return_date NULL) am Ende des Zeitraums
- Einzelne Ausleihen ohne Zahlung (fallen per INNER JOIN heraus)
"""

import sqlite3
import logging
import random
import numpy as np
from pathlib import Path
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# Stammdaten
# ─────────────────────────────────────────────
STORES = [1, 2]

CATEGORIES = [
    (1, "Action"), (2, "Animation"), (3, "Children"), (4, "Classics"),
    (5, "Comedy"), (6, "Documentary"), (7, "Drama"), (8, "Family"),
    (9, "Foreign"), (10, "Games"), (11, "Horror"), (12, "Music"),
    (13, "New"), (14, "Sci-Fi"), (15, "Sports"), (16, "Travel"),
]

TITLE_WORDS_A = [
    "ACADEMY", "ALIEN", "BEAST", "BRIDE", "CHAMBER", "DESERT", "EAGLES",
    "FIRE", "GHOST", "HARBOR", "ISLAND", "JUNGLE", "KING", "LEGEND",
    "MIDNIGHT", "NORTH", "OCEAN", "PIRATE", "QUEEN", "RIVER",
]
TITLE_WORDS_B = [
    "DINOSAUR", "CENTER", "HUNTER", "INTRIGUE", "ITALIAN", "STORM",
    "PANKY", "ROUGE", "SPIRIT", "TOWERS", "WARS", "ZORRO",
]

FIRST_NAMES = [
    "MARY", "PATRICIA", "LINDA", "BARBARA", "ELIZABETH", "JENNIFER", "MARIA",
    "SUSAN", "JAMES", "JOHN", "ROBERT", "MICHAEL", "WILLIAM", "DAVID",
    "RICHARD", "CHARLES", "JOSEPH", "THOMAS", "KAREN", "NANCY",
]
LAST_NAMES = [
    "SMITH", "JOHNSON", "WILLIAMS", "JONES", "BROWN", "DAVIS", "MILLER",
    "WILSON", "MOORE", "TAYLOR", "ANDERSON", "THOMAS", "JACKSON", "WHITE",
    "HARRIS", "MARTIN", "THOMPSON", "GARCIA", "MARTINEZ", "ROBINSON",
]

RENTAL_RATES = [0.99, 2.99, 4.99]
LATE_FEE_PER_DAY = 1.00

PERIOD_START = datetime(2005, 5, 24)
PERIOD_END = datetime(2006, 2, 14)
TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"


def generate_films(n: int = 200, seed: int = 42) -> list[tuple]:
    """
    Generiert Filmkatalog inkl. Kategorie, Leihpreis, Leihdauer und Popularität.

    Popularität folgt einer Pareto-Verteilung → realistische 80/20-Struktur
    im Umsatz je Film.

    Returns:
        Liste von (film_id, title, category_id, rental_rate, rental_duration, popularity)
    """
    random.seed(seed)
    np.random.seed(seed)

    popularity = np.random.pareto(1.5, size=n) + 1.0
    films = []
    used_titles = set()
    for film_id in range(1, n + 1):
        title = f"{random.choice(TITLE_WORDS_A)} {random.choice(TITLE_WORDS_B)}"
        while title in used_titles:
            title = f"{title} {film_id}"
        used_titles.add(title)

        films.append((
            film_id,
            title,
            random.choice(CATEGORIES)[0],
            random.choice(RENTAL_RATES),
            random.randint(3, 7),
            float(popularity[film_id - 1]),
        ))
    return films


def generate_inventory(films: list[tuple], seed: int = 42) -> list[tuple]:
    """
    2–8 Exemplare je Film, verteilt auf beide Filialen.

    Returns:
        Liste von (inventory_id, film_id, store_id)
    """
    random.seed(seed)
    inventory = []
    inventory_id = 1
    for film in films:
        for _ in range(random.randint(2, 8)):
            inventory.append((inventory_id, film[0], random.choice(STORES)))
            inventory_id += 1
    return inventory


def generate_customers(n: int = 400, seed: int = 42) -> list[tuple]:
    """
    Returns:
        Liste von (customer_id, first_name, last_name, store_id)
    """
    random.seed(seed)
    return [
        (i, random.choice(FIRST_NAMES), random.choice(LAST_NAMES), random.choice(STORES))
        for i in range(1, n + 1)
    ]


def generate_rentals_and_payments(
    films: list[tuple],
    inventory: list[tuple],
    customers: list[tuple],
    seed: int = 42
) -> tuple[list[tuple], list[tuple]]:
    """
    Generiert Ausleihen und zugehörige Zahlungen.

    Eingebettete Komplexität:
    - Filmwahl gewichtet nach Popularität (Long Tail)
    - Kunden-Aktivität Poisson-verteilt mit individuellem Faktor
    - Verspätung → Gebühr je Tag über der Leihdauer
    - ~1.5% offene Ausleihen, ~2% Ausleihen ohne Zahlung

    Returns:
        (rentals, payments) als Tuple-Listen
    """
    random.seed(seed)
    np.random.seed(seed)

    films_by_id = {f[0]: f for f in films}
    weights = np.array([films_by_id[inv[1]][5] for inv in inventory])
    weights = weights / weights.sum()
    total_seconds = int((PERIOD_END - PERIOD_START).total_seconds())

    rentals = []
    payments = []
    rental_id = 1
    payment_id = 1

    for customer in customers:
        customer_id = customer[0]
        activity = np.random.gamma(shape=2.0, scale=1.0)
        n_rentals = max(1, int(np.random.poisson(12 * activity)))
        picks = np.random.choice(len(inventory), size=n_rentals, p=weights)

        for pick in picks:
            inventory_id, film_id, _ = inventory[pick]
            _, _, _, rate, duration, _ = films_by_id[film_id]

            rental_date = PERIOD_START + timedelta(seconds=random.randint(0, total_seconds))
            days_out = random.randint(1, duration + 3)
            return_date = rental_date + timedelta(days=days_out, hours=random.randint(0, 23))

            # Ausleihen kurz vor Periodenende sind teils noch offen
            is_open = return_date > PERIOD_END and random.random() < 0.6
            rentals.append((
                rental_id,
                rental_date.strftime(TIMESTAMP_FMT),
                inventory_id,
                customer_id,
                None if is_open else return_date.strftime(TIMESTAMP_FMT),
            ))

            if random.random() >= 0.02:
                late_days = max(0, days_out - duration)
                amount = round(rate + late_days * LATE_FEE_PER_DAY, 2)
                payment_date = rental_date + timedelta(minutes=random.randint(0, 120))
                payments.append((
                    payment_id,
                    customer_id,
                    rental_id,
                    amount,
                    payment_date.strftime(TIMESTAMP_FMT),
                ))
                payment_id += 1

            rental_id += 1

    logger.info(f"Generiert: {len(rentals):,} Ausleihen, {len(payments):,} Zahlungen für {len(customers)} Kunden")
    return rentals, payments


def setup_database(db_path: Path, force_recreate: bool = False) -> bool:
    """
    Erstellt SQLite-Datenbank mit Schema und lädt Beispieldaten.

    Idempotent: Wird die DB bereits gefunden, wird sie übersprungen
    (außer force_recreate=True).

    Args:
        db_path: Pfad zur SQLite-Datenbankdatei
        force_recreate: DB löschen und neu aufbauen wenn True

    Returns:
        True wenn erfolgreich, False bei Fehler
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    if db_path.exists() and not force_recreate:
        logger.info(f"Datenbank bereits vorhanden: {db_path}")
        return True

    logger.info(f"Erstelle Datenbank: {db_path}")

    try:
        conn = sqlite3.connect(db_path)
        cursor = conn.cursor()

        # ─── Schema ───────────────────────────────────────────────
        cursor.executescript("""
            DROP TABLE IF EXISTS payment;
            DROP TABLE IF EXISTS rental;
            DROP TABLE IF EXISTS inventory;
            DROP TABLE IF EXISTS film_category;
            DROP TABLE IF EXISTS film;
            DROP TABLE IF EXISTS category;
            DROP TABLE IF EXISTS customer;
            DROP TABLE IF EXISTS store;

            CREATE TABLE store (
                store_id INTEGER PRIMARY KEY
            );

            CREATE TABLE category (
                category_id INTEGER PRIMARY KEY,
                name        TEXT    NOT NULL
            );

            CREATE TABLE film (
                film_id         INTEGER PRIMARY KEY,
                title           TEXT    NOT NULL,
                rental_rate     REAL    NOT NULL,
                rental_duration INTEGER NOT NULL
            );

            CREATE TABLE film_category (
                film_id     INTEGER NOT NULL REFERENCES film(film_id),
                category_id INTEGER NOT NULL REFERENCES category(category_id),
                PRIMARY KEY (film_id, category_id)
            );

            CREATE TABLE inventory (
                inventory_id INTEGER PRIMARY KEY,
                film_id      INTEGER NOT NULL REFERENCES film(film_id),
                store_id     INTEGER NOT NULL REFERENCES store(store_id)
            );

            CREATE TABLE customer (
                customer_id INTEGER PRIMARY KEY,
                first_name  TEXT    NOT NULL,
                last_name   TEXT    NOT NULL,
                store_id    INTEGER NOT NULL REFERENCES store(store_id)
            );

            CREATE TABLE rental (
                rental_id    INTEGER PRIMARY KEY,
                rental_date  TEXT    NOT NULL,
                inventory_id INTEGER NOT NULL REFERENCES inventory(inventory_id),
                customer_id  INTEGER NOT NULL REFERENCES customer(customer_id),
                return_date  TEXT
            );

            CREATE TABLE payment (
                payment_id   INTEGER PRIMARY KEY,
                customer_id  INTEGER NOT NULL REFERENCES customer(customer_id),
                rental_id    INTEGER REFERENCES rental(rental_id),
                amount       REAL    NOT NULL,
                payment_date TEXT    NOT NULL
            );

            -- Index für die Join-Ketten der Reports
            CREATE INDEX idx_rental_inventory  ON rental(inventory_id);
            CREATE INDEX idx_rental_customer   ON rental(customer_id);
            CREATE INDEX idx_payment_rental    ON payment(rental_id);
            CREATE INDEX idx_payment_customer  ON payment(customer_id);
            CREATE INDEX idx_inventory_film    ON inventory(film_id);
        """)
        logger.info("Schema erstellt")

        # ─── Stammdaten ───────────────────────────────────────────
        cursor.executemany("INSERT INTO store VALUES (?)", [(s,) for s in STORES])
        cursor.executemany("INSERT INTO category VALUES (?, ?)", CATEGORIES)

        films = generate_films()
        cursor.executemany(
            "INSERT INTO film VALUES (?, ?, ?, ?)",
            [(f[0], f[1], f[3], f[4]) for f in films]
        )
        cursor.executemany(
            "INSERT INTO film_category VALUES (?, ?)",
            [(f[0], f[2]) for f in films]
        )
        logger.info(f"Filme geladen: {len(films)}")

        inventory = generate_inventory(films)
        cursor.executemany("INSERT INTO inventory VALUES (?, ?, ?)", inventory)
        logger.info(f"Inventar geladen: {len(inventory):,} Exemplare")

        customers = generate_customers()
        cursor.executemany("INSERT INTO customer VALUES (?, ?, ?, ?)", customers)
        logger.info(f"Kunden geladen: {len(customers)}")

        # ─── Transaktionen ────────────────────────────────────────
        rentals, payments = generate_rentals_and_payments(films, inventory, customers)
        cursor.executemany("INSERT INTO rental VALUES (?, ?, ?, ?, ?)", rentals)
        cursor.executemany("INSERT INTO payment VALUES (?, ?, ?, ?, ?)", payments)
        logger.info(f"Ausleihen/Zahlungen geladen: {len(rentals):,} / {len(payments):,}")

        conn.commit()
        conn.close()

        logger.info("✅ Datenbank-Setup abgeschlossen")
        return True

    except Exception as e:
        logger.error(f"Fehler beim Datenbank-Setup: {e}")
        if db_path.exists():
            db_path.unlink()
        return False
