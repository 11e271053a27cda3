from . import books, cinema, games, music

ALL_DEFINITIONS = music.DEFINITIONS + cinema.DEFINITIONS + games.DEFINITIONS + books.DEFINITIONS

__all__ = ["ALL_DEFINITIONS", "books", "cinema", "games", "music"]
