# Point d entree: l application est construite ici, avec sa configuration
import os

from dotenv import load_dotenv

from config import load_settings
from contract_signature import create_app

# On charge les variables d environnement depuis le fichier .env (identifiants mail, base...)
load_dotenv()

app = create_app(load_settings())

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
