from clinical_validator.main import main

main()
