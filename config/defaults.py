from config.schema import AppConfig, HoursConfig, AutoGenConfig, StorageConfig
from models.block import BlockConfig, BlockKind
from models.establishment import Establishment
from models.subject import Subject

WEEKDAYS = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes"]


def default_block_layout() -> list[BlockConfig]:
    """Jornada estándar (14 bloques, 10 de clase).

    1  08:00 - 08:45  clase
    2  08:45 - 09:30  clase
    3  09:30 - 09:45  recreo
    4  09:45 - 10:30  clase
    5  10:30 - 11:15  clase
    6  11:15 - 11:30  recreo
    7  11:30 - 12:15  clase
    8  12:15 - 13:00  clase
    9  13:00 - 13:30  colación
    10 13:30 - 14:15  clase
    11 14:15 - 15:00  clase
    12 15:00 - 15:15  recreo
    13 15:15 - 16:00  clase
    14 16:00 - 16:45  clase
    """
    c, r, l = BlockKind.CLASE, BlockKind.RECREO, BlockKind.COLACION
    rows = [
        (1, "08:00", "08:45", c, 45),
        (2, "08:45", "09:30", c, 45),
        (3, "09:30", "09:45", r, 15),
        (4, "09:45", "10:30", c, 45),
        (5, "10:30", "11:15", c, 45),
        (6, "11:15", "11:30", r, 15),
        (7, "11:30", "12:15", c, 45),
        (8, "12:15", "13:00", c, 45),
        (9, "13:00", "13:30", l, 30),
        (10, "13:30", "14:15", c, 45),
        (11, "14:15", "15:00", c, 45),
        (12, "15:00", "15:15", r, 15),
        (13, "15:15", "16:00", c, 45),
        (14, "16:00", "16:45", c, 45),
    ]
    return [
        BlockConfig(id=i, start_time=s, end_time=e, kind=k, duration_minutes=d)
        for i, s, e, k, d in rows
    ]


def default_app_config() -> AppConfig:
    """Configuración por defecto."""
    return AppConfig(
        system_name="Sistema de Horarios Docentes",
        day_names=list(WEEKDAYS),
        block_layout=None,
        hours=HoursConfig(),
        autogen=AutoGenConfig(),
        storage=StorageConfig(),
    )


# ─── ASIGNATURAS BASE ───
# Se usan cuando el establecimiento no define asignaturas propias.

BASE_SUBJECTS: list[Subject] = [
    Subject(id=1,  code="LyC",   name="Lenguaje y Comunicación",           color="#ef4444"),
    Subject(id=2,  code="Mat",   name="Matemática",                        color="#3b82f6"),
    Subject(id=3,  code="CN",    name="Ciencias Naturales",                color="#8b5cf6"),
    Subject(id=4,  code="HGyCs", name="Historia, Geografía y Cs. Sociales", color="#ec4899"),
    Subject(id=5,  code="Ing",   name="Inglés",                            color="#10b981"),
    Subject(id=6,  code="EF",    name="Educación Física y Salud",          color="#06b6d4"),
    Subject(id=7,  code="AV",    name="Artes Visuales",                    color="#f59e0b"),
    Subject(id=8,  code="Mus",   name="Música",                            color="#a855f7"),
    Subject(id=9,  code="Tec",   name="Tecnología",                        color="#64748b"),
    Subject(id=10, code="LI",    name="Lengua Indígena",                   color="#eab308"),
    Subject(id=11, code="O",     name="Orientación",                       color="#14b8a6"),
    Subject(id=12, code="Rel",   name="Religión",                          color="#d946ef"),
    Subject(id=13, code="TA",    name="Taller A",                          color="#f97316"),
    Subject(id=14, code="TB",    name="Taller B",                          color="#84cc16"),
    Subject(id=15, code="TC",    name="Taller C",                          color="#0ea5e9"),
    Subject(id=16, code="Otras", name="Otras",                             color="#6b7280", editable=True),
]


# ─── ESTABLECIMIENTOS INICIALES ───
# El sistema parte con la red de escuelas; los docentes se cargan después.

_INITIAL_SCHOOLS: list[tuple[str, str]] = [
    ("Escuela Aillinco", "1-8"),
    ("Escuela Chacaico", "1-6"),
    ("Escuela El Capricho", "1-8"),
    ("Escuela Fortín Ñielol", "1-8"),
    ("Escuela Gabriela Mistral", "1-8"),
    ("Escuela Huampomallin", "1-8"),
    ("Escuela La Piedra", "1-8"),
    ("Escuela Llufquentue", "1-8"),
    ("Escuela Mañiuco", "1-8"),
    ("Escuela Nilpe", "1-6"),
    ("Escuela Pangueco", "1-8"),
    ("Escuela Pelantaro", "1-8"),
    ("Escuela Quetre", "1-6"),
    ("Escuela Quinahue", "1-6"),
    ("Escuela Río Quillem", "1-8"),
    ("Escuela Rucatraro Alto", "1-8"),
    ("Escuela Santa Margarita", "1-8"),
    ("Escuela Trabunquillem", "1-6"),
    ("Escuela Trif Trifco", "1-6"),
    ("Liceo Gregorio Urrutia", "7-12"),   # 7° Básico a 4° Medio
]


def initial_establishments() -> list[Establishment]:
    """Los 20 establecimientos de la red (todos con 80%+ prioritarios)."""
    return [
        Establishment(id=i, name=name, levels=levels, prioritized=True)
        for i, (name, levels) in enumerate(_INITIAL_SCHOOLS, 1)
    ]
