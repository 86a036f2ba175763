"""Random and unique value generators for filling test tables."""