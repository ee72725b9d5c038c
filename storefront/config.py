# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du service de checkout.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env) sans écraser l'environnement
- Normalise et expose les secrets/URLs (Supabase, Paystack, Stripe, Flutterwave)
- Choisit le backend de stockage des commandes (supabase | memory)
- Expose les réglages de sécurité (CORS/hosts, token admin) et de tolérance des montants
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _flag(name: str, default: str = "false") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes", "on")

# Supabase: URLs et clés (public/anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Tables Supabase utilisées par le checkout
ORDERS_TABLE = os.getenv("ORDERS_TABLE", "orders")
PRODUCTS_TABLE = os.getenv("PRODUCTS_TABLE", "products")
CARTS_TABLE = os.getenv("CARTS_TABLE", "carts")
NOTIFICATIONS_TABLE = os.getenv("NOTIFICATIONS_TABLE", "notifications")

# Stockage des commandes: "supabase" (production) ou "memory" (dev/tests)
ORDER_STORE_BACKEND = _clean_env(os.getenv("ORDER_STORE_BACKEND") or "supabase").lower()

# Fournisseurs de paiement: secrets et endpoints
PAYSTACK_SECRET_KEY = _clean_env(os.getenv("PAYSTACK_SECRET_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
FLUTTERWAVE_SECRET_KEY = _clean_env(os.getenv("FLUTTERWAVE_SECRET_KEY") or "")

PAYSTACK_BASE_URL = _clean_env(os.getenv("PAYSTACK_BASE_URL") or "https://api.paystack.co").rstrip("/")
FLUTTERWAVE_BASE_URL = _clean_env(os.getenv("FLUTTERWAVE_BASE_URL") or "https://api.flutterwave.com").rstrip("/")

# Délai max d'un appel fournisseur (un timeout est traité comme une panne réseau)
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "15"))

# Écart toléré entre le total envoyé et la somme du panier
AMOUNT_TOLERANCE = float(os.getenv("AMOUNT_TOLERANCE", "0.005"))

# Re-vérifie les prix unitaires du panier contre le catalogue
VERIFY_CART_PRICES = _flag("VERIFY_CART_PRICES", "true")

# Confirme le paiement auprès du fournisseur avant de passer la commande en 'paid'
PAYMENT_CALLBACK_VERIFY = _flag("PAYMENT_CALLBACK_VERIFY", "false")

# Cible de retour par défaut (page boutique) si le client n'en fournit pas
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "http://localhost:5173").rstrip("/")

# Administration des commandes (expédition/livraison)
ADMIN_API_TOKEN = _clean_env(os.getenv("ADMIN_API_TOKEN") or "")

# Cookies/ Sécurité
COOKIE_SECURE = _flag("COOKIE_SECURE", "false")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
# Proxies dont les en-têtes X-Forwarded-For sont crus (même variable que uvicorn)
FORWARDED_ALLOW_IPS = [h.strip() for h in os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1").split(",") if h.strip()]
