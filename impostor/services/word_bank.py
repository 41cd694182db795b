# impostor/services/word_bank.py
import logging
import random
from typing import Dict, List, Sequence

from impostor.core.exceptions import PreconditionFailed

logger = logging.getLogger("impostor.services.word_bank")  # Logger for this module

WORD_CATEGORIES: Dict[str, List[str]] = {
    "Animales": [
        "Perro", "Gato", "Elefante", "Jirafa", "León", "Tigre", "Delfín", "Pingüino",
        "Caballo", "Conejo", "Tortuga", "Águila", "Serpiente", "Cocodrilo", "Mono", "Oso",
    ],
    "Comida": [
        "Pizza", "Hamburguesa", "Paella", "Tacos", "Sushi", "Empanada", "Tortilla", "Helado",
        "Chocolate", "Ensalada", "Lasaña", "Churros", "Gazpacho", "Arepa", "Ceviche", "Croissant",
    ],
    "Lugares": [
        "Playa", "Montaña", "Hospital", "Escuela", "Aeropuerto", "Biblioteca", "Cine", "Museo",
        "Supermercado", "Estadio", "Iglesia", "Castillo", "Desierto", "Selva", "Gimnasio", "Zoológico",
    ],
    "Objetos": [
        "Paraguas", "Reloj", "Teléfono", "Llave", "Espejo", "Guitarra", "Mochila", "Lámpara",
        "Tijeras", "Almohada", "Cámara", "Bicicleta", "Sartén", "Gafas", "Vela", "Martillo",
    ],
    "Profesiones": [
        "Médico", "Bombero", "Policía", "Profesor", "Cocinero", "Piloto", "Abogado", "Astronauta",
        "Carpintero", "Periodista", "Veterinario", "Mago", "Dentista", "Fotógrafo", "Jardinero", "Pintor",
    ],
    "Deportes": [
        "Fútbol", "Baloncesto", "Tenis", "Natación", "Boxeo", "Ciclismo", "Golf", "Voleibol",
        "Esquí", "Surf", "Atletismo", "Béisbol", "Rugby", "Karate", "Escalada", "Ajedrez",
    ],
}


def get_categories() -> List[str]:
    return list(WORD_CATEGORIES.keys())


def get_random_word_weighted(category: str, used_words: Sequence[str] | None = None) -> str:
    """
    Picks a word from `category`, uniformly among the words not yet in `used_words`.

    Once every word of the category has been used, falls back to the whole category,
    skipping the most recently used word when there is a choice, so a valid category
    always yields a word.
    """
    words = WORD_CATEGORIES.get(category)
    if not words:
        raise PreconditionFailed(f"Unknown category '{category}'.")

    used = set(used_words or [])
    fresh = [w for w in words if w not in used]
    if fresh:
        return random.choice(fresh)

    logger.info(f"Category '{category}' exhausted ({len(words)} words). Falling back to repeats.")
    last_used = used_words[-1] if used_words else None
    candidates = [w for w in words if w != last_used] or words
    return random.choice(candidates)
