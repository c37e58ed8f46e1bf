# fence_quote/middleware/__init__.py
