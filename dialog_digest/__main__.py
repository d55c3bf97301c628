from dialog_digest.main import main

main()
