"""Records and constants describing the buildings placed on a city map."""