import copy

# Labels that are events or non-study activities; never reported as subjects.
EXCLUDED_SUBJECTS = frozenset({
    "Repaso",
    "Descanso",
    "Básquet",
    "Gym",
    "Cena",
    "Repaso Semanal",
    "Repaso General",
})
# Any label containing one of these is an exam marker.
EXCLUDED_SUBJECT_MARKERS = ("PARCIAL",)


def _t(start, end, subject, task, hours):
    return {"start": start, "end": end, "subject": subject, "task": task, "hours": hours}


_DEFAULT_CONFIG = {
    "exams": [
        {"name": "Termo Primera fecha", "date": "2025-12-01T12:00:00", "subject": "Termodinámica", "priority": 1},
        {"name": "Electro Primera fecha", "date": "2025-12-03T15:00:00", "subject": "Electrotecnia", "priority": 2},
        {"name": "Racional Primera fecha", "date": "2025-12-04T10:00:00", "subject": "Mecánica Racional", "priority": 1},
        {"name": "Estructuras Primera fecha", "date": "2025-12-09T14:00:00", "subject": "Estructuras III", "priority": 3},
        {"name": "Termo Segunda fecha", "date": "2025-12-15T12:00:00", "subject": "Termodinámica", "priority": 1},
        {"name": "Racional Segunda fecha", "date": "2025-12-15T10:00:00", "subject": "Mecánica Racional", "priority": 1},
    ],
    "habits": [
        {"id": "sleep23", "name": "Dormir 23:00", "icon": "🛌", "critical": True},
        {"id": "dinner20", "name": "Cenar 20:00-20:30", "icon": "🍽️", "critical": False},
        {"id": "noLol", "name": "CERO LoL", "icon": "🎮", "critical": True},
        {"id": "water2L", "name": "2L agua", "icon": "💧", "critical": False},
    ],
    "schedule": {
        "2025-10-22": [
            _t("08:00", "10:00", "Mecánica Racional", "🎯 Inicio Módulo II - Introducción a temas clave", 2),
            _t("10:30", "12:00", "Termodinámica", "🎯 Inicio Módulo II - Conceptos base", 1.5),
            _t("13:30", "16:30", "Electrotecnia", "Repaso módulo anterior", 3),
        ],
        "2025-10-23": [
            _t("08:00", "10:00", "Estructuras III", "🎯 Inicio Módulo II - Introducción", 2),
            _t("10:30", "12:00", "Mecánica Racional", "Continuación temas", 1.5),
            _t("13:30", "16:00", "Termodinámica", "Ejercicios introductorios", 2.5),
        ],
        "2025-10-24": [
            _t("08:00", "10:00", "Mecánica Racional", "🎯 Temas clave del módulo", 2),
            _t("10:30", "12:00", "Termodinámica", "Avance de teoría", 1.5),
            _t("13:30", "16:00", "Electrotecnia", "Práctica de circuitos", 2.5),
        ],
        "2025-10-25": [
            _t("08:00", "10:00", "Estructuras III", "🎯 Ejercicios básicos", 2),
            _t("10:30", "12:00", "Mecánica Racional", "Problemas prácticos", 1.5),
            _t("18:00", "20:00", "Básquet", "🏀 Partido/Entrenamiento", 2),
        ],
        "2025-10-26": [
            _t("10:00", "12:00", "Descanso", "🌴 DESCANSO TOTAL", 0),
        ],
        "2025-10-27": [
            _t("08:00", "10:00", "Termodinámica", "🎯 Repasar ciclos termodinámicos básicos", 2),
            _t("10:30", "12:00", "Mecánica Racional", "🎯 Dominar cinemática de partículas", 1.5),
            _t("13:00", "15:00", "Gym", "💪 Entrenamiento", 2),
            _t("16:00", "20:00", "Termo (Cursada)", "📚 Clase teórica", 4),
            _t("20:00", "20:30", "Cena", "🍽️ Cenar", 0.5),
        ],
        "2025-10-28": [
            _t("08:00", "10:00", "Estructuras III", "🎯 Entender métodos matriciales básicos", 2),
            _t("15:00", "18:00", "Estructuras (Cursada)", "📚 Clase práctica", 3),
            _t("20:00", "20:30", "Cena", "🍽️ Cenar", 0.5),
        ],
        "2025-10-29": [
            _t("08:00", "10:30", "Termodinámica", "🎯 Dominar ecuaciones de energía", 2.5),
            _t("14:00", "18:00", "Termo (Cursada)", "📚 Clase teórica", 4),
            _t("18:00", "20:00", "Básquet (opcional)", "🏀 Si vas, perfecto. Si no, descansá", 0),
        ],
        "2025-10-31": [
            _t("08:00", "10:00", "Termodinámica", "🎯 Resolver 5 problemas de ciclos", 2),
            _t("13:00", "15:00", "Repaso Semanal", "📝 Revisar lo que aprendiste esta semana", 2),
        ],
        "2025-11-04": [
            _t("14:00", "16:00", "ESTRUCTURAS PARCIAL", "📝 Primer parcial", 2),
            _t("18:30", "19:30", "Estructuras III", "Repasar errores del parcial", 1),
        ],
    },
}


def get_default_config() -> dict:
    """Fresh copy of the built-in configuration (exams, habits, schedule)."""
    return copy.deepcopy(_DEFAULT_CONFIG)
