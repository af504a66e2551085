"""Tablas normativas de horas lectivas / no lectivas (Ley 20.903).

Jornada semanal (horas de contrato) → (horas lectivas, horas no lectivas).
Dato legal fijo: NO se calcula en tiempo de ejecución.
"""

MIN_HOURS = 1
MAX_HOURS = 44

# ─── PROPORCIÓN 60/40 ───
# Solo Primer Ciclo en establecimientos con 80%+ de alumnos prioritarios.

TABLE_60_40: dict[int, tuple[int, int]] = {
     1: ( 1,  0),
     2: ( 1,  1),
     3: ( 2,  1),
     4: ( 2,  2),
     5: ( 3,  2),
     6: ( 4,  2),
     7: ( 4,  3),
     8: ( 5,  3),
     9: ( 5,  4),
    10: ( 6,  4),
    11: ( 7,  4),
    12: ( 7,  5),
    13: ( 8,  5),
    14: ( 8,  6),
    15: ( 9,  6),
    16: (10,  6),
    17: (10,  7),
    18: (11,  7),
    19: (11,  8),
    20: (12,  8),
    21: (13,  8),
    22: (13,  9),
    23: (14,  9),
    24: (14, 10),
    25: (15, 10),
    26: (16, 10),
    27: (16, 11),
    28: (17, 11),
    29: (17, 12),
    30: (18, 12),
    31: (19, 12),
    32: (19, 13),
    33: (20, 13),
    34: (20, 14),
    35: (21, 14),
    36: (22, 14),
    37: (22, 15),
    38: (23, 15),
    39: (23, 16),
    40: (24, 16),
    41: (25, 16),
    42: (25, 17),
    43: (26, 17),
    44: (26, 18),
}

# ─── PROPORCIÓN 65/35 ───
# Segundo Ciclo (siempre) y Primer Ciclo sin 80%+ prioritarios.

TABLE_65_35: dict[int, tuple[int, int]] = {
     1: ( 1,  0),
     2: ( 1,  1),
     3: ( 2,  1),
     4: ( 3,  1),
     5: ( 3,  2),
     6: ( 4,  2),
     7: ( 5,  2),
     8: ( 5,  3),
     9: ( 6,  3),
    10: ( 7,  3),
    11: ( 7,  4),
    12: ( 8,  4),
    13: ( 8,  5),
    14: ( 9,  5),
    15: (10,  5),
    16: (10,  6),
    17: (11,  6),
    18: (12,  6),
    19: (12,  7),
    20: (13,  7),
    21: (14,  7),
    22: (14,  8),
    23: (15,  8),
    24: (16,  8),
    25: (16,  9),
    26: (17,  9),
    27: (18,  9),
    28: (18, 10),
    29: (19, 10),
    30: (20, 10),
    31: (20, 11),
    32: (21, 11),
    33: (21, 12),
    34: (22, 12),
    35: (23, 12),
    36: (23, 13),
    37: (24, 13),
    38: (25, 13),
    39: (25, 14),
    40: (26, 14),
    41: (27, 14),
    42: (27, 15),
    43: (28, 15),
    44: (29, 15),
}
