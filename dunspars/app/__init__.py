"""ABOUTME: Query, resolution and analysis layer over the local PokeAPI database.
ABOUTME: Houses the store, entity resolvers, name validation and roster tools."""
