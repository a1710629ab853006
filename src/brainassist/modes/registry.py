"""Mode registry.

This module hides the design decision of how each mode is tuned:
which model it talks to, how creative its sampling is, which system
instruction it carries and how it presents itself.
"""

from functools import lru_cache
from typing import Any

from ..prompts import build_instruction
from .models import ChatMode, ModeProfile

PRO_MODEL = "gemini-3-pro-preview"
FLASH_MODEL = "gemini-2.5-flash"

# Model used for one-shot prompt rewriting
OPTIMIZER_MODEL = PRO_MODEL
OPTIMIZER_TEMPERATURE = 0.4

_MODE_TABLE: dict[ChatMode, dict[str, Any]] = {
    ChatMode.LEARNING: {
        "model_name": PRO_MODEL,
        "temperature": 0.3,
        "top_k": 35,
        "label": "Apprentissage",
        "assistant_label": "BrainAssist",
        "icon": "🎓",
        "color": "#2563eb",
        "placeholder": "Ask me anything about your studies...",
        "optimization_context": "academic and educational inquiries",
        "suggested_prompts": (
            "Résous cette intégrale : $\\int x^2 dx$.",
            "Explique le théorème de Pythagore.",
            "Analyse ce poème de Baudelaire.",
            "Calcule le déterminant de cette matrice.",
        ),
    },
    ChatMode.SUPPORT: {
        "model_name": FLASH_MODEL,
        "temperature": 0.7,
        "top_k": 40,
        "label": "Soutien",
        "assistant_label": "Soutien",
        "icon": "💚",
        "color": "#059669",
        "placeholder": "Exprimes-toi, je t'écoute...",
        "optimization_context": "emotional support and psychological well-being",
        "suggested_prompts": (
            "Je me sens dépassé par la charge de travail.",
            "J'ai peur d'échouer à mon examen.",
            "J'ai besoin de motivation.",
            "Technique de respiration pour le stress.",
        ),
    },
    ChatMode.MUSIC: {
        "model_name": FLASH_MODEL,
        "temperature": 0.9,
        "top_k": 60,
        "label": "Musique",
        "assistant_label": "Musique",
        "icon": "🎵",
        "color": "#c026d3",
        "placeholder": "Cherche une musique, un genre, une playlist...",
        "optimization_context": "music curation and audio vibes",
        "suggested_prompts": (
            "Playlist 'Deep Focus' (Pas de paroles).",
            "Boost d'énergie pour le matin.",
            "Ambiance Lo-Fi pour réviser tard.",
            "Découverte Jazz / Soul.",
        ),
    },
    ChatMode.ORGANIZATION: {
        "model_name": PRO_MODEL,
        "temperature": 0.1,
        "top_k": 10,
        "label": "Organisation",
        "assistant_label": "Planning",
        "icon": "📅",
        "color": "#4f46e5",
        "placeholder": "Organise ma journée, ajoute une tâche...",
        "optimization_context": "productivity, time-management and logistics",
        "suggested_prompts": (
            "Optimise ma journée de demain.",
            "Trie mes tâches par priorité.",
            "Trouve un créneau pour mes révisions.",
            "Méthode Pomodoro : comment l'appliquer ?",
        ),
    },
    ChatMode.DEEP_RESEARCH: {
        "model_name": PRO_MODEL,
        "temperature": 0.1,
        "top_k": 10,
        "label": "Recherche",
        "assistant_label": "Recherche",
        "icon": "🔎",
        "color": "#7c3aed",
        "placeholder": "Deep Research : Déposez des fichiers pour analyse approfondie...",
        "optimization_context": "document analysis, summarization and extraction of key concepts",
        "suggested_prompts": (
            "Analyse ce fichier PDF de cours.",
            "Génère des QCM basés sur mon cours.",
            "Résume les points clés pour l'examen.",
            "Extrais les définitions importantes.",
        ),
    },
    ChatMode.ANALYTICS: {
        "model_name": PRO_MODEL,
        "temperature": 0.1,
        "top_k": 10,
        "label": "Analytics",
        "assistant_label": "Analytics",
        "icon": "📊",
        "color": "#0284c7",
        "placeholder": "Analyse mes données d'études...",
        "optimization_context": "data analysis, performance tracking and study insights",
        "suggested_prompts": (
            "Génère mon rapport de performance hebdomadaire.",
            "Quelles sont mes faiblesses actuelles ?",
            "Suis-je en risque de surmenage ?",
            "Crée un plan de rattrapage pour les Maths.",
        ),
    },
    ChatMode.POLYGLOT: {
        "model_name": PRO_MODEL,
        "temperature": 0.3,
        "top_k": 20,
        "label": "Polyglot",
        "assistant_label": "Polyglot",
        "icon": "🌐",
        "color": "#0891b2",
        "placeholder": "Traduis, apprends ou corrige un texte dans n'importe quelle langue...",
        "optimization_context": "translation, linguistics, grammar correction and language learning",
        "suggested_prompts": (
            "Traduis ce texte en anglais académique.",
            "Explique la règle du Present Perfect.",
            "Comment dit-on 'bonjour' en Japonais ?",
            "Corrige les fautes de ce paragraphe en Espagnol.",
        ),
    },
    ChatMode.GAMES: {
        "model_name": FLASH_MODEL,
        "temperature": 0.8,
        "top_k": 50,
        "label": "Jeux & Quiz",
        "assistant_label": "Jeux",
        "icon": "🎮",
        "color": "#d97706",
        "placeholder": "Lance un quiz, un vrai ou faux, un jeu de mémoire...",
        "optimization_context": "educational games, quizzes, trivia and memory challenges",
        "suggested_prompts": (
            "Lance un Quiz sur l'Histoire de France.",
            "Jeu : Vrai ou Faux en Biologie.",
            "Test de vocabulaire Anglais (Niveau B2).",
            "Énigme logique pour m'échauffer le cerveau.",
        ),
    },
    ChatMode.CHATPDF: {
        "model_name": PRO_MODEL,
        "temperature": 0.2,
        "top_k": 20,
        "label": "ChatPDF",
        "assistant_label": "ChatPDF",
        "icon": "📄",
        "color": "#e11d48",
        "placeholder": "Déposez vos fichiers (PDF, Doc, Txt) pour résumé et analyse...",
        "optimization_context": "document analysis, summarizing PDFs, extracting key points from files",
        "suggested_prompts": (
            "Dépose un document pour obtenir un résumé.",
            "Analyse ce fichier et sors les points clés.",
            "Explique les concepts complexes de ce document.",
            "Génère un quiz basé sur ce fichier.",
        ),
    },
    ChatMode.NOTES: {
        "model_name": PRO_MODEL,
        "temperature": 0.3,
        "top_k": 20,
        "label": "Notes & Rédac",
        "assistant_label": "Notes",
        "icon": "📝",
        "color": "#ca8a04",
        "placeholder": "Demandez de l'aide pour rédiger ou corriger vos notes...",
        "optimization_context": "text editing, note-taking, summarizing and content structuring",
        "suggested_prompts": (
            "Aide-moi à structurer ce plan de cours.",
            "Corrige l'orthographe de mes notes.",
            "Ajoute une introduction à ce chapitre.",
            "Transforme ces points en paragraphes rédigés.",
        ),
    },
}


@lru_cache(maxsize=len(ChatMode))
def _build_profile(mode: ChatMode) -> ModeProfile:
    return ModeProfile(
        mode=mode,
        instruction_text=build_instruction(mode.value),
        **_MODE_TABLE[mode],
    )


def resolve(mode: ChatMode | str) -> ModeProfile:
    """Look up the profile for a mode.

    Args:
        mode: A ChatMode or its string value

    Returns:
        The mode's static profile

    Raises:
        ValueError: If the mode is not one of the ten known modes
    """
    return _build_profile(ChatMode(mode))


def list_modes() -> list[ModeProfile]:
    """Get every mode profile in switcher order."""
    return [resolve(mode) for mode in ChatMode]
