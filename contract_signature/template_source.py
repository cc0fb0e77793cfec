# contract_signature/template_source.py
# sources du gabarit pdf: lues a chaque remplissage, jamais gardees en cache
import logging
from pathlib import Path

import requests

from .errors import TemplateError

logger = logging.getLogger(__name__)


class FileTemplateSource:
    def __init__(self, path):
        self.path = Path(path)

    def read(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise TemplateError(f"Gabarit introuvable: {self.path}") from e

    def __repr__(self):
        return f"FileTemplateSource({str(self.path)!r})"


class UrlTemplateSource:
    def __init__(self, url, timeout=10):
        self.url = url
        self.timeout = timeout

    def read(self) -> bytes:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Echec du telechargement du gabarit {self.url}: {e}")
            raise TemplateError(f"Gabarit inaccessible: {self.url}") from e
        return resp.content

    def __repr__(self):
        return f"UrlTemplateSource({self.url!r})"


class BytesTemplateSource:
    # gabarit deja en memoire (tests, gabarit televerse)
    def __init__(self, content: bytes):
        self.content = content

    def read(self) -> bytes:
        return self.content


def template_source_for(reference, timeout=10):
    # une reference http(s) est telechargee, tout le reste est un chemin local
    reference = str(reference)
    if reference.startswith(("http://", "https://")):
        return UrlTemplateSource(reference, timeout=timeout)
    return FileTemplateSource(reference)
