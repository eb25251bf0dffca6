"""rid_index core: types, ordering, configuration, errors and the store facade."""
