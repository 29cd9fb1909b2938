"""
Couche services (cas d'utilisation).

Les services orchestrent la logique du domaine : normalisation des noms,
scoring, cascade de fournisseurs, correspondance des episodes, construction
de la bibliotheque et nettoyage des orphelins.

Les services dependent des ports de core/, jamais des implementations
concretes de adapters/.
"""
