"""
Merchant Ops webhook service entry point.
"""
import os
import sys
import traceback

# Default to production for deployment
config_name = os.getenv('FLASK_ENV', 'production')
print(f"[MerchantOps] Config: {config_name}")
print(f"[MerchantOps] DATABASE_URL: {'set' if os.getenv('DATABASE_URL') else 'NOT SET'}")
print(f"[MerchantOps] SHOPIFY_WEBHOOK_SECRET: {'set' if os.getenv('SHOPIFY_WEBHOOK_SECRET') else 'NOT SET'}")

try:
    from merchant_ops import create_app
    app = create_app(config_name)
    print(f"[MerchantOps] Routes: {len(list(app.url_map.iter_rules()))}")
except Exception as e:
    print(f"[MerchantOps] FATAL ERROR during app creation: {e}")
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
