"""
Models package for the Local API Docs server

Contains request/response models for the HTTP routes:
- api.proxy: proxy relay request model
- api.editor: endpoint editor persistence models

Endpoint documentation models live with the store in ``api_docs.store``.
"""
