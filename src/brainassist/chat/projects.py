"""Project starter prompts.

A project captures a mode plus a generated starter prompt that frames the
first message of a new conversation in that mode.
"""

from ..modes import ChatMode
from .models import Project

_STARTER_TEMPLATES: dict[ChatMode, str] = {
    ChatMode.MUSIC: 'Je souhaite lancer un projet musical intitulé : "{title}".\n'
    "Contexte et Vibe souhaitée : {description}",
    ChatMode.DEEP_RESEARCH: 'Projet de recherche : "{title}".\n'
    "Objectifs : {description}\n"
    "Je vais fournir des documents. Aide-moi à les structurer et les analyser.",
    ChatMode.POLYGLOT: 'Projet linguistique : "{title}".\n'
    "Langue cible et objectifs : {description}",
    ChatMode.GAMES: 'Je veux créer un parcours de jeu éducatif : "{title}".\n'
    "Thème et type de jeux : {description}",
    ChatMode.CHATPDF: 'Projet ChatPDF : "{title}".\n'
    "Je vais uploader des fichiers. Fais une analyse complète. Contexte: {description}",
}

_DEFAULT_TEMPLATE = (
    'Je lance un nouveau projet d\'étude/travail sur le thème : "{title}".\n'
    "Description et Objectifs : {description}"
)


def build_project_prompt(mode: ChatMode | str, title: str, description: str = "") -> str:
    """Generate the starter prompt for a project."""
    template = _STARTER_TEMPLATES.get(ChatMode(mode), _DEFAULT_TEMPLATE)
    return template.format(title=title, description=description)


def create_project(mode: ChatMode | str, title: str, description: str = "") -> Project:
    """Create a project with its generated starter prompt.

    Raises:
        ValueError: If title is empty
    """
    title = title.strip()
    if not title:
        raise ValueError("Project title must not be empty")
    description = description.strip()
    return Project(
        title=title,
        description=description,
        mode=ChatMode(mode),
        prompt=build_project_prompt(mode, title, description),
    )
