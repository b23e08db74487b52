"""
Scripted conversation texts and action buttons.

The conversation language is French; product names and numbers are
interpolated by the helpers below.
"""

from __future__ import annotations

from typing import Optional

from dynprot.domain.conversation.models import ChatAction

QUANTITY_QUESTION = "{food} détecté ! Quelle quantité ?"
SCAN_QUANTITY_QUESTION = "{product} détecté ! Quelle quantité avez-vous consommée ?"
MEAL_COMPLETED = "✅ Parfait ! Voici votre repas :"
MANUAL_ENTRY_SAVED = "✅ Entrée manuelle enregistrée !"
MANUAL_ENTRY_PROMPT = (
    "Décrivez votre repas : 'salade | protéines : 30g | calories : 500'"
)
MODIFICATION_APPLIED = "Modification « {modification} » appliquée ! Voici votre repas :"
CANCELLED = "Analyse annulée. Décrivez un nouveau repas quand vous voulez."
NOTHING_TO_CANCEL = "Rien à annuler."
UNKNOWN_COMMAND = "Commande non reconnue. Tapez 'aide' pour voir les commandes disponibles."

NO_PENDING_ANALYSIS = "Je n'ai pas d'analyse en cours. Décrivez d'abord votre repas."
QUANTITY_NOT_UNDERSTOOD = (
    "Je n'ai pas bien compris la quantité. Pouvez-vous être plus précis ? "
    "(ex: '150g', '2 portions', '1 assiette')"
)
TEXT_ANALYSIS_FAILED = (
    "Je n'ai pas pu analyser « {text} ». Pouvez-vous être plus précis ou utiliser une photo ?"
)
PHOTO_INVALID = "Format de photo invalide. Veuillez reprendre une photo."
PHOTO_NO_FOOD = (
    "Je n'ai pas pu identifier d'aliments sur cette photo. Pouvez-vous réessayer "
    "avec une photo plus claire ou décrire votre repas ?"
)
LOW_CONFIDENCE = (
    "J'ai détecté « {food} » mais avec peu de certitude. "
    "Pouvez-vous reprendre une photo ou décrire votre repas ?"
)
PHOTO_ANALYSIS_FAILED = (
    "Erreur lors de l'analyse de la photo. Vérifiez votre connexion et réessayez."
)
SCAN_NO_PRODUCT = "Aucune donnée de produit reçue. Veuillez réessayer le scan."
SCAN_NOT_FOUND = "Produit introuvable pour le code {barcode}. Veuillez réessayer le scan."
GENERIC_ERROR = "Désolé, une erreur s'est produite. Pouvez-vous réessayer ?"

HELP = """Commandes disponibles :

• **Saisie normale** : "pâtes au poulet"
• **Entrée manuelle** : "entrée manuelle : salade | protéines : 30g | calories : 500"
• **Quantités** : "150g", "2 portions", "1 assiette"
• **Modifications** : "plus", "moins", "double", "moitié"
• **Annuler** : "annuler"
• **Actions** : Utilisez les icônes 📷 🎤 🔍"""

RETRY_HINT = " Vous pouvez réessayer dans {seconds} secondes."


# ═══════════════════════════════════════════════════════════
# ACTIONS
# ═══════════════════════════════════════════════════════════

SAVE = ChatAction(id="save", label="Sauvegarder", type="save", variant="primary")
MODIFY = ChatAction(id="modify", label="Modifier", type="modify", variant="secondary")
RETRY = ChatAction(id="retry", label="Réessayer", type="retry", variant="primary")
RETRY_PHOTO = ChatAction(id="retry-photo", label="Reprendre une photo", type="retry")
RETRY_SCAN = ChatAction(id="retry-scan", label="Scanner à nouveau", type="retry")
DESCRIBE_MEAL = ChatAction(id="text-input", label="Décrire le repas", type="modify")
CANCEL = ChatAction(id="cancel", label="Annuler", type="cancel", variant="danger")

COMPLETED_ACTIONS = [SAVE, MODIFY]
AWAITING_QUANTITY_ACTIONS = [CANCEL]


def quantity_question(food: str) -> str:
    return QUANTITY_QUESTION.format(food=food)


def scan_quantity_question(product: str, brand: Optional[str] = None) -> str:
    name = f"{product} ({brand})" if brand else product
    return SCAN_QUANTITY_QUESTION.format(product=name)


def with_retry_hint(message: str, seconds: Optional[int]) -> str:
    """Append the retry delay to a failure message."""
    if not seconds:
        return message
    return message + RETRY_HINT.format(seconds=seconds)


def text_analysis_failed(text: str) -> str:
    return TEXT_ANALYSIS_FAILED.format(text=text)


def low_confidence(food: str) -> str:
    return LOW_CONFIDENCE.format(food=food)


def scan_not_found(barcode: str) -> str:
    return SCAN_NOT_FOUND.format(barcode=barcode)


def modification_applied(modification: str) -> str:
    return MODIFICATION_APPLIED.format(modification=modification)
