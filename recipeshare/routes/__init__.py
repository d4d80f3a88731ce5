"""
RecipeShare API: Routes Package
================================

Route Inventory:
    - recipes.py: GET    /recipes              (index, search, pagination)
                  POST   /recipes              (create with image upload)
                  GET    /recipes/{id}         (show with comments)
                  PUT    /recipes/{id}         (update, optional new image)
                  DELETE /recipes/{id}         (delete record and image)
    - health.py:  GET    /health               (service health check)

Routes stay thin: extract input, call a service, shape the response.
"""
