"""
shotgrab - region screenshots, screen recordings and gifs with one-shot upload.

Thin orchestration over slop, maim, ffmpeg, xclip and notify-send, plus
upload clients for imgur and gfycat-style filedrop hosting.
"""

__version__ = "0.4.0"
