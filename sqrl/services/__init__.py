"""Application services for the sqrl CLI.

Services implement the release pipeline, coordinating between the domain
layer (core/) and infrastructure (platform/, git/).
"""
