from .backend.main import main

main()
