"""mailblocks — application (persistance, identité, API) autour de block_builder."""
