"""Compare and join column types and table schemas as a join-semilattice."""