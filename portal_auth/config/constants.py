# portal_auth/config/constants.py

# Constantes para o documento de identidade (DNI / RUC)
DNI_LENGTH = 8
RUC_LENGTH = 11

# Tipos de usuário aceitos pelo backend
USER_TYPE_ADMIN = 'Admin'
USER_TYPE_WORKER = 'Trabajador'

# Chaves do registro persistido (sempre gravadas juntas)
STORAGE_USER_KEY = 'user'
STORAGE_SESSION_KEY = 'session'

# Ícone genérico dos agrupadores sintetizados no menu
MENU_FOLDER_ICON = 'FolderIcon'

# Rotas do backend (relativas a API_BASE_URL)
ENDPOINT_VALIDATE_DOCUMENT = '/auth/validar-documento'
ENDPOINT_SEND_CHALLENGE = '/auth/enviar-codigo'
ENDPOINT_VERIFY_CHALLENGE = '/auth/verificar-codigo'
ENDPOINT_LOGOUT = '/auth/cerrar-sesion'
ENDPOINT_SYSTEM_VIEWS = '/vistas'
ENDPOINT_USER_VIEWS = '/vistas/usuario/{idus}'
ENDPOINT_HEALTH = '/health'

# Seção administrativa (gestão de usuários e atribuição de vistas)
ADMIN_USERS_ROUTE = '/admin/usuarios'
