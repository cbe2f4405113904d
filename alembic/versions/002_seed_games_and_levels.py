"""seed the five games and their levels

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None

games = sa.table(
    "games",
    sa.column("id", sa.String),
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("image_url", sa.String),
    sa.column("route", sa.String),
    sa.column("difficulty_level", sa.Integer),
    sa.column("is_active", sa.Boolean),
)

games_levels = sa.table(
    "games_levels",
    sa.column("id", sa.String),
    sa.column("game_id", sa.String),
    sa.column("level", sa.Integer),
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("difficulty", sa.String),
    sa.column("activities_count", sa.Integer),
    sa.column("config", postgresql.JSONB),
)

GAMES = [
    {
        "id": "game-escritura",
        "name": "Escribir Números en Palabras",
        "description": "¡Aprende a escribir los números en palabras! Arrastra las palabras para formar la respuesta correcta.",
        "image_url": "/assets/juego1.png",
        "route": "/alumno/juegos/escritura",
        "difficulty_level": 1,
        "is_active": True,
    },
    {
        "id": "game-ordenamiento",
        "name": "Ordenamiento de Números",
        "description": "¡Aprende a ordenar números de forma divertida! Ordená de menor a mayor.",
        "image_url": "/assets/juego2.png",
        "route": "/alumno/juegos/ordenamiento",
        "difficulty_level": 1,
        "is_active": True,
    },
    {
        "id": "game-descomposicion",
        "name": "Arma la Descomposición y Composición de los números",
        "description": "¡Aprende a descomponer y componer números! Descubre los valores posicionales.",
        "image_url": "/assets/juego1.png",
        "route": "/alumno/juegos/descomposicion",
        "difficulty_level": 2,
        "is_active": True,
    },
    {
        "id": "game-calculos",
        "name": "Cálculos Matemáticos",
        "description": "Operaciones matemáticas con múltiples niveles y actividades.",
        "image_url": "/assets/game-calculos.png",
        "route": "/alumno/juegos/calculos",
        "difficulty_level": 2,
        "is_active": True,
    },
    {
        "id": "game-escala",
        "name": "Escribí el número anterior y el posterior",
        "description": "¡Explora los números anteriores y posteriores! Completa secuencias numéricas.",
        "image_url": "/assets/game-escala.png",
        "route": "/alumno/juegos/escala",
        "difficulty_level": 2,
        "is_active": True,
    },
]

_DIFFICULTY = {1: "Fácil", 2: "Intermedio", 3: "Avanzado"}


def _level(game: str, level: int, name: str, description: str, config: dict, slug: str | None = None) -> dict:
    tier = (level - 1) % 3 + 1
    return {
        "id": f"level-{slug or game}-{tier if slug else level}",
        "game_id": f"game-{game}",
        "level": level,
        "name": name,
        "description": description,
        "difficulty": _DIFFICULTY[tier],
        "activities_count": 5,
        "config": config,
    }


def _calculos(operation: str, first_level: int, label: str, icon: str, ranges: list[dict]) -> list[dict]:
    blurbs = (
        "¡Principiante! Operaciones simples",
        "¡Intermedio! Un poco más difícil",
        "¡Experto! El desafío máximo",
    )
    colors = (
        "from-green-400 to-emerald-500",
        "from-blue-400 to-indigo-500",
        "from-purple-400 to-pink-500",
    )
    return [
        _level(
            "calculos",
            first_level + i,
            f"Nivel {i + 1} - {label}",
            blurbs[i],
            {"operation": operation, "color": colors[i], "icon": icon, **ranges[i]},
            slug=f"calculos-{operation}",
        )
        for i in range(3)
    ]


LEVELS = [
    _level("ordenamiento", 1, "Nivel 1", "Números del 0 al 99", {"min": 0, "max": 99, "color": "blue", "numbersCount": 6}),
    _level("ordenamiento", 2, "Nivel 2", "Números del 100 al 999", {"min": 100, "max": 999, "color": "green", "numbersCount": 6}),
    _level("ordenamiento", 3, "Nivel 3", "Números del 1.000 al 9.999", {"min": 1000, "max": 9999, "color": "purple", "numbersCount": 6}),

    _level("descomposicion", 1, "Fácil", "0 al 99", {"min": 10, "max": 99, "color": "chocolate", "range": "0 al 99"}),
    _level("descomposicion", 2, "Intermedio", "100 al 999", {"min": 100, "max": 999, "color": "terracotta", "range": "100 al 999"}),
    _level("descomposicion", 3, "Avanzado", "1.000 al 9.999", {"min": 1000, "max": 9999, "color": "chocolate", "range": "1.000 al 9.999"}),

    _level("escala", 1, "Vecinos Cercanos", "Anterior y posterior (+1 y -1)", {"min": 5, "max": 95, "operation": 1, "color": "blue", "range": "1 al 100"}),
    _level("escala", 2, "Saltos de 10", "Anterior y posterior (+10 y -10)", {"min": 30, "max": 490, "operation": 10, "color": "green", "range": "20 al 500"}),
    _level("escala", 3, "Grandes Saltos", "Anterior y posterior (+100 y -100)", {"min": 300, "max": 900, "operation": 100, "color": "purple", "range": "200 al 1000"}),

    _level("escritura", 1, "Nivel 1", "Números del 1 al 50", {"min": 1, "max": 50, "color": "blue"}),
    _level("escritura", 2, "Nivel 2", "Números del 51 al 200", {"min": 51, "max": 200, "color": "green"}),
    _level("escritura", 3, "Nivel 3", "Números del 201 al 500", {"min": 201, "max": 500, "color": "purple"}),

    *_calculos("suma", 1, "Sumas", "➕", [
        {"min": 10, "max": 50, "minResult": 20, "maxResult": 100},
        {"min": 100, "max": 600, "minResult": 200, "maxResult": 1200},
        {"min": 1000, "max": 5000, "minResult": 2000, "maxResult": 10000},
    ]),
    *_calculos("resta", 4, "Restas", "➖", [
        {"min": 20, "max": 100, "minResult": 10, "maxResult": 50},
        {"min": 200, "max": 800, "minResult": 100, "maxResult": 500},
        {"min": 2000, "max": 7000, "minResult": 1000, "maxResult": 5000},
    ]),
    *_calculos("multiplicacion", 7, "Multiplicación", "✖️", [
        {"min": 2, "max": 10, "minResult": 4, "maxResult": 100},
        {"min": 2, "max": 10, "minResult": 4, "maxResult": 100, "hasUnknown": True},
        {"min": 10, "max": 1000, "minResult": 100, "maxResult": 100000, "multiplier": [10, 100, 1000]},
    ]),
]


def upgrade() -> None:
    op.bulk_insert(games, GAMES)
    op.bulk_insert(games_levels, LEVELS)


def downgrade() -> None:
    ids = [g["id"] for g in GAMES]
    op.execute(games_levels.delete().where(games_levels.c.game_id.in_(ids)))
    op.execute(games.delete().where(games.c.id.in_(ids)))
