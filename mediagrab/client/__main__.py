from mediagrab.client.cli import main

main()
