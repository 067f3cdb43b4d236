from inventario.main import main

main()
