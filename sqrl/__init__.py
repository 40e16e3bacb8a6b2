"""sqrl: build, releasify and publish a Squirrel release from a .nuspec."""

__version__ = "0.3.0"
