"""
Backend du webshop: catalogue, checkout Stripe (session + webhook) et historique des commandes.
L'application ASGI est exposée par webshop.asgi:app.
"""
