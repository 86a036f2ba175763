"""Table filter rules and MySQL replication rule filters."""