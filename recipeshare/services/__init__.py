# Services package init
"""
RecipeShare API: Services Layer
================================

Service Inventory:
    - ImageStore (abstract): interface to the image host
    - CloudinaryImageStore: ImageStore over the Cloudinary SDK
    - RecipeStore: SQLAlchemy record store (find, count, find_by_id,
      create, save, remove)
    - FileService: upload intake (filename and size checks)
    - ListingService: paginated, searchable recipe index
    - RecipeService: create/update/delete ordering across both stores

Services receive their collaborators through their constructors; the wiring
lives in recipeshare/dependencies.py.
"""
