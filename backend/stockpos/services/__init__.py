# Overview: Service layer; every component takes the PersistentStore it works against.
