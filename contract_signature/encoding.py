# contract_signature/encoding.py
# encodage base64 des documents pour le transport json
import base64
import binascii

from .errors import EncodingError


def encode_document(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def decode_document(data: str) -> bytes:
    if not isinstance(data, str):
        raise EncodingError("Le document encode doit etre une chaine base64")
    data = data.strip()
    # prefixe data url envoye par certains navigateurs (data:application/pdf;base64,...)
    if data.startswith("data:") and "," in data:
        header, data = data.split(",", 1)
        if not header.endswith(";base64"):
            raise EncodingError("Data URL non encodee en base64")
    # base64 coupe en lignes de 76 colonnes (RFC 2045): les blancs internes sont retires
    data = "".join(data.split())
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Base64 invalide: {e}") from e
