# contract_signature/errors.py


class SignatureError(Exception):
    """Base de toutes les erreurs du pipeline de signature."""


class ValidationError(SignatureError):
    # champs requis manquants ou invalides dans la soumission
    def __init__(self, message, fields=None):
        super().__init__(message)
        self.fields = list(fields or [])


class TemplateError(SignatureError):
    # gabarit pdf illisible ou structure inattendue (pages manquantes)
    pass


class FieldNotFoundError(TemplateError):
    # champ de formulaire absent du gabarit: gabarit et configuration divergent
    def __init__(self, field_name):
        super().__init__(f"Champ de formulaire introuvable dans le gabarit: {field_name}")
        self.field_name = field_name


class EncodingError(SignatureError):
    # base64 mal forme au decodage
    pass


class TransportError(SignatureError):
    # echec d envoi de courriel ou d ecriture en base
    pass
