"""Indices de telechargement : client torrent et tracker."""
