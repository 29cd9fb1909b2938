"""Utilitaires partages (constantes, manipulations de chaines et de chemins)."""
