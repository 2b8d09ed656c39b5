"""
Main entry point for the terrain viewer
"""
import logging

from terrastream.game import Game


def main():
    """Start the viewer"""
    logging.basicConfig(level=logging.INFO)
    game = Game()
    game.run()


if __name__ == "__main__":
    main()
